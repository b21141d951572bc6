#!/usr/bin/env python3
"""
mountio Example Script

Sequences the library's operations from the command line. Any error raised by
the library ends the script with a non-zero exit status.

Author: Tim Hosking
GitHub: https://github.com/Munger
"""

import argparse
import os
import shutil
import sys
import tempfile

from mountio import ArchiveError, FileStoreError, MountIO


def archive_demo(fs, workdir):
    """Write, read, import and probe entries in a fresh container."""
    zip_path = os.path.join(workdir, "example.zip")
    print(f"\nArchive demo: {zip_path}")
    print("-" * 50)

    fs.archives.write_entry(zip_path, "hello.txt", "Привет, это демонстрация работы с ZIP!")
    print(f"Read back: {fs.archives.read_entry_text(zip_path, 'hello.txt')}")

    external = os.path.join(workdir, "external.txt")
    fs.files.write_text(external, "Это содержимое внешнего файла")
    fs.archives.copy_external_file(zip_path, external, "copied_external.txt")

    for name in ("hello.txt", "copied_external.txt", "nonexistent.txt"):
        print(f"{name} exists: {fs.archives.entry_exists(zip_path, name)}")
    for entry in fs.archives.list_entries(zip_path):
        print(f"  {entry.path} ({entry.size} bytes)")

    fs.files.delete(external, if_exists=True)
    fs.files.delete(zip_path, if_exists=True)


def files_demo(fs, workdir):
    """Create, copy, move, inspect and remove plain files."""
    work = os.path.join(workdir, "example_dir")
    notes = os.path.join(work, "notes.txt")
    print(f"\nFiles demo: {work}")
    print("-" * 50)

    fs.files.write_text(notes, "Hello NIO Files!", create_parents=True)
    for line in fs.files.read_lines(notes):
        print(f"Line: {line}")

    copy_path = os.path.join(work, "notes_copy.txt")
    moved_path = os.path.join(work, "notes_renamed.txt")
    fs.files.copy(notes, copy_path, replace_existing=True)
    fs.files.move(copy_path, moved_path, replace_existing=True)

    record = fs.files.stat(moved_path)
    print(f"{os.path.basename(record.path)}: size={record.size} bytes, modified={record.modified}")
    for record in fs.files.list_directory(work):
        kind = "[DIR] " if record.is_dir else "[FILE]"
        print(f"  {kind} {os.path.basename(record.path)} ({record.size} bytes)")

    fs.files.delete(moved_path)
    fs.files.delete(notes, if_exists=True)
    fs.files.delete(work)


def streams_demo(fs, workdir, size_kb):
    """Time buffered vs unbuffered reads of a generated file."""
    large = os.path.join(workdir, "largeTest.bin")
    print(f"\nStreams demo: {size_kb} KiB")
    print("-" * 50)
    fs.files.write_bytes(large, bytes(1024) * size_kb)
    try:
        result = fs.streams.compare(large)
    finally:
        fs.files.delete(large, if_exists=True)
    print(f"Unbuffered: {result.unbuffered.duration_ms:.1f} ms")
    print(f"Buffered:   {result.buffered.duration_ms:.1f} ms")
    print(f"Difference: {result.delta_ns // 1_000_000} ms")


def main(argv=None):
    """Main function demonstrating mountio features."""
    parser = argparse.ArgumentParser(description="mountio Example Script")
    parser.add_argument("--archives", action="store_true", help="Run the archive demo")
    parser.add_argument("--files", action="store_true", help="Run the plain file demo")
    parser.add_argument("--streams", type=int, metavar="KIB", help="Compare read speeds on a file of KIB kibibytes")
    parser.add_argument("--debug", type=int, default=2, help="Debug level (0-4)")
    args = parser.parse_args(argv)

    fs = MountIO()
    fs.config.debug_level = args.debug
    workdir = tempfile.mkdtemp(prefix="mountio_demo")
    run_all = not (args.archives or args.files or args.streams)
    try:
        if args.archives or run_all:
            archive_demo(fs, workdir)
        if args.files or run_all:
            files_demo(fs, workdir)
        if args.streams or run_all:
            streams_demo(fs, workdir, args.streams or 5120)
    except (ArchiveError, FileStoreError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        shutil.rmtree(workdir, ignore_errors=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
