"""
Custom pages command line.

Classify URLs and manage each site's stored list of custom pages.
"""

import argparse
import asyncio
import logging
import sys

import yaml
from pydantic import ValidationError

import pages_config
from classifiers import InvalidDomain, Valid
from page_models import CustomPage, Error
from site_registry import SiteAdapter, SiteRegistry

logger = logging.getLogger(__name__)


def _print_pages(pages) -> None:
    if not pages:
        print("(no custom pages)")
        return
    for index, page in enumerate(pages):
        print(f"{index:3d}  {page.label}  ->  {page.path}")


def _report(result) -> int:
    if isinstance(result, Error):
        logger.error(result.message)
        return 1
    _print_pages(result.data)
    return 0


async def _load(adapter: SiteAdapter):
    result = await adapter.crud.load_pages()
    if isinstance(result, Error):
        raise RuntimeError(result.message)
    return result.data


async def run_command(args, registry: SiteRegistry) -> int:
    """
    Run one subcommand against the registry.

    Returns:
        Process exit code
    """
    if args.command == 'classify':
        adapter = registry.get(args.site) if args.site else registry.find_for_url(args.url)
        if adapter is None:
            print("invalid domain: no site accepts this host")
            return 1
        result = adapter.classifier.classify(args.url)
        if isinstance(result, Valid):
            print(f"[{adapter.name}] {result.label}  ->  {result.path}")
            return 0
        reason = "invalid domain" if isinstance(result, InvalidDomain) else "invalid path"
        print(f"[{adapter.name}] {reason}")
        return 1

    if not args.site:
        logger.error(f"'{args.command}' requires --site (available: {', '.join(registry.names())})")
        return 1

    adapter = registry.get(args.site)

    if args.command == 'list':
        return _report(await adapter.crud.load_pages())

    async with adapter.lock:
        if args.command == 'clear':
            return _report(await adapter.crud.clear_all())

        try:
            pages = await _load(adapter)
        except RuntimeError as e:
            logger.error(str(e))
            return 1

        if args.command == 'add':
            return _report(await adapter.crud.add_page(args.url, args.label, pages))
        if args.command == 'delete':
            return _report(await adapter.crud.delete_page(args.index, pages))
        if args.command == 'move':
            return _report(await adapter.order.reorder_pages(args.from_index, args.to_index, pages))
        if args.command == 'restore':
            try:
                page = CustomPage(path=args.path, label=args.label)
            except ValidationError as e:
                logger.error(f"Invalid page: {e.error_count()} error(s) in path/label")
                return 1
            return _report(await adapter.order.restore_page(page, args.index, pages))

    logger.error(f"Unknown command: {args.command}")
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Manage per-site custom pages',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python pages.py classify https://example.com/categories/jav-uncensored
  python pages.py --site example_tube add https://example.com/tags/retro/
  python pages.py --site example_tube add https://example.com/search/?query=cats --label Cats
  python pages.py --site example_tube list
  python pages.py --site example_tube move 0 2
  python pages.py --site example_tube delete 1
  python pages.py --site example_tube restore /tags/retro/ "Tag: Retro" 1
  python pages.py --site example_tube clear
        """
    )

    parser.add_argument('--site', help='Site name (see sites/*.yaml)')
    parser.add_argument('--sites-dir', default=str(pages_config.SITES_DIR),
                        help='Directory with site YAML files')
    parser.add_argument('--storage-dir', default=str(pages_config.STORAGE_DIR),
                        help='Directory for stored page lists')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')

    commands = parser.add_subparsers(dest='command', required=True)

    classify = commands.add_parser('classify', help='Classify a URL without saving it')
    classify.add_argument('url')

    commands.add_parser('list', help='List custom pages')

    add = commands.add_parser('add', help='Add a page from a URL')
    add.add_argument('url')
    add.add_argument('--label', default='', help='Custom label (default: derived from URL)')

    delete = commands.add_parser('delete', help='Delete the page at an index')
    delete.add_argument('index', type=int)

    restore = commands.add_parser('restore', help='Put a deleted page back at an index')
    restore.add_argument('path', help='Canonical path of the page')
    restore.add_argument('label')
    restore.add_argument('index', type=int, help='Position (clamped to the list)')

    commands.add_parser('clear', help='Delete all pages')

    move = commands.add_parser('move', help='Move a page to another position')
    move.add_argument('from_index', type=int)
    move.add_argument('to_index', type=int)

    return parser


def main(argv=None) -> int:
    """Main entry point with argument parsing."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else pages_config.LOG_LEVEL,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        registry = SiteRegistry.from_directory(args.sites_dir, args.storage_dir)
    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid site definition: {e}")
        return 1
    except yaml.YAMLError as e:
        logger.error(f"Could not parse site file: {e}")
        return 1

    try:
        return asyncio.run(run_command(args, registry))
    except KeyError as e:
        logger.error(e.args[0])
        return 1


if __name__ == "__main__":
    sys.exit(main())
