import click
import os
import sys
from typing import Optional

try:
    from .errors import ExportError
    from .exporter import DocsPdfExporter
    from .utils import load_config, setup_logging, validate_url, build_output_filename, ensure_directory
except ImportError:
    from errors import ExportError
    from exporter import DocsPdfExporter
    from utils import load_config, setup_logging, validate_url, build_output_filename, ensure_directory


@click.command()
@click.argument('url', type=str)
@click.option('--output', '-o',
              type=click.Path(),
              default='./output.pdf',
              show_default=True,
              help='Output PDF filename')
@click.option('--doc-version', '-v',
              help='Document version to include in filename')
@click.option('--no-clean',
              is_flag=True,
              help='Do not clean temporary files')
@click.option('--config', '-c',
              type=click.Path(exists=True),
              help='Configuration file path')
@click.option('--verbose',
              is_flag=True,
              help='Enable verbose logging')
def export(url: str,
           output: str,
           doc_version: Optional[str],
           no_clean: bool,
           config: Optional[str],
           verbose: bool):
    """
    Export a documentation site to a single PDF.

    URL: Base URL of the documentation site
    """
    if not validate_url(url):
        click.echo(f"❌ Invalid URL: {url}", err=True)
        sys.exit(1)

    # Load configuration
    app_config = load_config(config or 'config.yaml')
    if no_clean:
        app_config['cleanup']['clean_temp_files'] = False
    if verbose:
        app_config['logging']['level'] = 'DEBUG'

    logger = setup_logging(app_config['logging'])

    output_path = build_output_filename(output, doc_version)
    ensure_directory(os.path.dirname(output_path))

    try:
        result = DocsPdfExporter(app_config, logger=logger).export(url, output_path)
    except ExportError as e:
        click.echo(f"❌ Export failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"Exported to: {result}")


def main():
    try:
        export()
    except KeyboardInterrupt:
        click.echo("\n⚠️  Export interrupted by user", err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
