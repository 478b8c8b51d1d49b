"""
Simple script to validate a site file.

Usage:
    python validate_site.py sites/example_tube.yaml
    python validate_site.py sites/example_tube.yaml https://example.com/categories/amateur/2/
"""

import sys
import logging

from classifiers import UrlClassifier, Valid
from site_loader import load_site, validate_site

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


def main():
    if len(sys.argv) < 2:
        print("Usage: python validate_site.py <site_file> [url ...]")
        sys.exit(1)

    site_file = sys.argv[1]
    sample_urls = sys.argv[2:]

    try:
        logger.info(f"Loading site: {site_file}")
        site = load_site(site_file)

        logger.info("✓ Site loaded successfully")
        logger.info(f"  Name: {site.name}")
        logger.info(f"  Domain: {site.domain} (also www.{site.domain})")
        logger.info(f"  Trailing slash: {'yes' if site.trailing_slash else 'no'}")
        logger.info(f"  Storage key: {site.storage_key}")
        logger.info(f"  Routes: {len(site.routes)}")
        for route in site.routes:
            extras = []
            if route.query_key:
                extras.append(f"?{route.query_key}=")
            if route.paginated:
                extras.append("paginated")
            if route.search:
                extras.append("search")
            suffix = f" [{', '.join(extras)}]" if extras else ""
            logger.info(f"    - {route.name}: {route.path}{suffix} -> {route.label or '(derived)'}")

        warnings = validate_site(site)
        if warnings:
            logger.warning("Validation warnings:")
            for warning in warnings:
                logger.warning(f"  - {warning}")
        else:
            logger.info("✓ No validation warnings")

        if sample_urls:
            classifier = UrlClassifier(site)
            logger.info("")
            logger.info("Sample URLs:")
            for url in sample_urls:
                result = classifier.classify(url)
                if isinstance(result, Valid):
                    logger.info(f"  ✓ {url} -> {result.path} ({result.label})")
                else:
                    logger.warning(f"  ✗ {url} -> {type(result).__name__}")

        logger.info("")
        logger.info("Site is valid and ready to use!")

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Invalid site: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
