#!/usr/bin/env python3

import argparse
import logging
import os
import sys
import tempfile
from concurrent.futures import ProcessPoolExecutor

from .errors import (
    CursorThemeError,
    CursorWriteError,
    DocumentEvaluationError,
    DocumentIoError,
)
from .render import render_cursor
from .theme import load_theme
from .xcursor import write


def create_dirs(output_dir, theme):
    """Create `<output_dir>/<theme name>/cursors` and return (theme dir, cursor dir)."""
    theme_dir = os.path.join(output_dir, theme.name)
    cursor_dir = os.path.join(theme_dir, "cursors")
    os.makedirs(cursor_dir, exist_ok=True)
    print(f"Created output directory: {cursor_dir}")
    return theme_dir, cursor_dir


def write_cursor_file(path, images):
    """Write an Xcursor file atomically.

    The data goes to a temporary file next to `path` which is moved into
    place only once it has been written completely.
    """
    try:
        fd, tmp_path = tempfile.mkstemp(dir=os.path.dirname(path) or ".", prefix=".tmp-")
    except OSError as e:
        raise CursorWriteError(f"when opening file {path}: {e}") from e
    try:
        with os.fdopen(fd, "wb") as f:
            write(f, images)
        os.replace(tmp_path, path)
    except OSError as e:
        os.unlink(tmp_path)
        raise CursorWriteError(f"failed to write {path}: {e}") from e
    except BaseException:
        os.unlink(tmp_path)
        raise


def link_cursor_names(cursor_dir, links):
    """Create a relative symlink in `cursor_dir` for every alias."""
    for alias, target in sorted(links.items()):
        source_path = os.path.join(cursor_dir, alias)
        # Make room for the symlink, if there's a file there already.
        try:
            os.remove(source_path)
        except FileNotFoundError:
            pass
        try:
            os.symlink(target, source_path)
        except OSError as e:
            raise CursorWriteError(f"while trying to link {source_path} -> {target}: {e}") from e
        logging.getLogger(__name__).debug("ln -s %s %s", target, source_path)


def write_theme_file(path, name):
    with open(path, "w", encoding="utf-8") as f:
        f.write("[Icon Theme]\n")
        f.write(f"Name={name}\n")
        f.write('Inherits="hicolor"\n')


def build_theme(theme, output_dir, jobs=1, keep_going=False, previews=False):
    """Render and write every cursor of `theme`, then its links and theme files.

    Returns the names of the cursors that failed; only non-empty when
    `keep_going` is set, otherwise the first failure is raised.
    """
    theme_dir, cursor_dir = create_dirs(output_dir, theme)
    preview_dir = os.path.join(theme_dir, "previews")
    names = sorted(theme.cursors)
    failed = []

    # cursors are independent, so they may render in worker processes;
    # files are still written here, one at a time and in name order
    executor = ProcessPoolExecutor(max_workers=jobs) if jobs > 1 else None
    try:
        if executor is not None:
            futures = {
                name: executor.submit(render_cursor, theme.cursors[name], theme.style)
                for name in names
            }
        for name in names:
            try:
                if executor is not None:
                    images = futures[name].result()
                else:
                    images = render_cursor(theme.cursors[name], theme.style)
                out_path = os.path.join(cursor_dir, name)
                write_cursor_file(out_path, images)
                print(f"Created {out_path} ({', '.join(str(img.width) for img in images)})")
                if previews:
                    from .previews import write_previews

                    write_previews(name, images, preview_dir)
            except CursorThemeError as e:
                if not keep_going:
                    print(f"Failed to build cursor {name}", file=sys.stderr)
                    raise
                print(f"Warning: Error processing cursor {name}: {e}", file=sys.stderr)
                failed.append(name)
    finally:
        if executor is not None:
            executor.shutdown(cancel_futures=True)

    links = {}
    for alias, target in theme.links.items():
        if target in failed:
            print(f"Warning: Not linking {alias}, cursor {target} was not built", file=sys.stderr)
        else:
            links[alias] = target
    link_cursor_names(cursor_dir, links)
    write_theme_file(os.path.join(theme_dir, "cursor.theme"), theme.name)
    write_theme_file(os.path.join(theme_dir, "index.theme"), theme.name)
    return failed


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Render a vector cursor theme to X11 cursors"
    )
    parser.add_argument("input", help="Theme document (.toml or .json)")
    parser.add_argument(
        "-o", "--out", required=True, help="Directory the theme directory is created in"
    )
    parser.add_argument(
        "-j", "--jobs", type=int, default=1, help="Number of cursors rendered in parallel (default: 1)"
    )
    parser.add_argument(
        "--keep-going", action="store_true", help="Skip cursors that fail to render instead of stopping"
    )
    parser.add_argument(
        "--previews", action="store_true", help="Also write a PNG preview of every frame"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debugging output"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        theme = load_theme(args.input)
    except DocumentIoError as e:
        print(e, file=sys.stderr)
        return 1
    except DocumentEvaluationError as e:
        print(f"Invalid theme document {e}", file=sys.stderr)
        return 1

    print("=" * 60)
    print(f"Theme: {theme.name}")
    print(f"Input document: {args.input}")
    print(f"Output directory: {args.out}")
    print(f"Cursor sizes: {theme.style.sizes}")
    print(f"Cursors: {len(theme.cursors)}, links: {len(theme.links)}")
    print("=" * 60)

    try:
        failed = build_theme(
            theme, args.out, jobs=args.jobs, keep_going=args.keep_going, previews=args.previews
        )
    except CursorThemeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: when creating output files: {e}", file=sys.stderr)
        return 1

    if failed:
        print(f"{len(failed)} cursor(s) failed: {', '.join(failed)}", file=sys.stderr)
        return 1

    print("=" * 60)
    print("Theme built successfully!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
