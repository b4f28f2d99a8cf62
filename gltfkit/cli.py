"""
gltfkit CLI - Inspect, unpack and pack glTF / GLB files
"""

import click
import logging
import os
import sys
from pathlib import Path

from gltfkit import __version__
from gltfkit.container import read_glb, write_glb
from gltfkit.decoder import load
from gltfkit.exceptions import GLTFError
from gltfkit.resolver import resolve_accessor, resolve_buffer


def _configure_logging(verbose: bool) -> None:
    level = os.getenv("GLTFKIT_LOG_LEVEL", "WARNING").upper()
    if verbose:
        level = "DEBUG"
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _fail(message: str, verbose: bool = False, unexpected: bool = False) -> None:
    click.secho(message, fg='red', err=True)
    if unexpected and verbose:
        import traceback
        traceback.print_exc()
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    gltfkit - Load glTF 2.0 assets and resolve their binary resources.

    Examples:
        gltfkit info model.glb -v
        gltfkit unpack model.glb model.gltf --bin model.bin
        gltfkit pack model.gltf model.glb --bin model.bin
    """
    pass


@cli.command()
@click.argument('path')
@click.option('--verbose', '-v', is_flag=True, help='Resolve every buffer and accessor and report failures')
def info(path, verbose):
    """
    Show a summary of a .glb or .gltf file.

    Examples:
        gltfkit info model.glb
        gltfkit info scene.gltf -v
    """
    _configure_logging(verbose)
    try:
        doc = load(path)

        version = doc.asset.version if doc.asset else "?"
        click.echo(f"glTF {version}: {path}")
        click.echo(f"  Buffers: {len(doc.buffers)} (BIN chunk: {len(doc.bin)} bytes)")
        click.echo(f"  Buffer views: {len(doc.buffer_views)}")
        click.echo(f"  Accessors: {len(doc.accessors)}")
        click.echo(f"  Images: {len(doc.images)}")
        click.echo(f"  Materials: {len(doc.materials)}")
        click.echo(f"  Meshes: {len(doc.meshes)}")

        if not verbose:
            return

        failures = 0
        for i in range(len(doc.buffers)):
            try:
                data = resolve_buffer(doc, i)
                click.echo(f"  buffer {i}: {len(data)} bytes")
            except GLTFError as e:
                failures += 1
                click.secho(f"  buffer {i}: {e}", fg='yellow')
        for i in range(len(doc.accessors)):
            try:
                data, stride = resolve_accessor(doc, i)
                click.echo(f"  accessor {i}: {len(data)} bytes, stride {stride}")
            except GLTFError as e:
                failures += 1
                click.secho(f"  accessor {i}: {e}", fg='yellow')

        if failures:
            click.secho(f"{failures} resource(s) failed to resolve", fg='yellow')
        else:
            click.secho("✓ All resources resolved", fg='green')

    except FileNotFoundError as e:
        _fail(f"Error: {e}")
    except GLTFError as e:
        _fail(f"glTF Error: {e}")
    except Exception as e:
        _fail(f"Unexpected error: {e}", verbose, unexpected=True)


@cli.command()
@click.argument('input_path')
@click.argument('output_path')
@click.option('--bin', 'bin_path', default=None, help='Where to write the BIN chunk (default: OUTPUT_PATH with .bin suffix)')
@click.option('--verbose', '-v', is_flag=True, help='Show detailed info')
def unpack(input_path, output_path, bin_path, verbose):
    """
    Split a .glb into its JSON and BIN chunks.

    The chunks are written as-is, including GLB padding.

    Examples:
        gltfkit unpack model.glb model.gltf
        gltfkit unpack model.glb model.gltf --bin data.bin
    """
    _configure_logging(verbose)
    try:
        if not Path(input_path).exists():
            raise FileNotFoundError(f"Input file not found: {input_path}")

        json_chunk, bin_chunk = read_glb(input_path)
        Path(output_path).write_bytes(json_chunk)
        click.echo(f"JSON: {len(json_chunk)} bytes → {output_path}")

        if bin_chunk:
            bin_path = bin_path or str(Path(output_path).with_suffix('.bin'))
            Path(bin_path).write_bytes(bin_chunk)
            click.echo(f"BIN: {len(bin_chunk)} bytes → {bin_path}")

        click.secho(f"✓ Success! Unpacked {input_path}", fg='green')

    except FileNotFoundError as e:
        _fail(f"Error: {e}")
    except GLTFError as e:
        _fail(f"glTF Error: {e}")
    except Exception as e:
        _fail(f"Unexpected error: {e}", verbose, unexpected=True)


@cli.command()
@click.argument('input_path')
@click.argument('output_path')
@click.option('--bin', 'bin_path', default=None, help='Binary chunk to embed')
@click.option('--verbose', '-v', is_flag=True, help='Show detailed info')
def pack(input_path, output_path, bin_path, verbose):
    """
    Pack a JSON document and optional binary chunk into a .glb.

    Examples:
        gltfkit pack model.gltf model.glb
        gltfkit pack model.gltf model.glb --bin model.bin
    """
    _configure_logging(verbose)
    try:
        if not Path(input_path).exists():
            raise FileNotFoundError(f"Input file not found: {input_path}")
        if bin_path and not Path(bin_path).exists():
            raise FileNotFoundError(f"Binary file not found: {bin_path}")

        json_chunk = Path(input_path).read_bytes()
        bin_chunk = Path(bin_path).read_bytes() if bin_path else b""

        write_glb(output_path, json_chunk, bin_chunk)

        click.secho(f"✓ Success! Packed {output_path}", fg='green')

    except FileNotFoundError as e:
        _fail(f"Error: {e}")
    except ValueError as e:
        _fail(f"Error: {e}")
    except Exception as e:
        _fail(f"Unexpected error: {e}", verbose, unexpected=True)


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
