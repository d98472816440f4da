# znippy

znippy packs a directory into an archive in which each file is compressed on
its own. The archive is made of two files that sit side by side:

- `<name>.zdata` holds the stored chunks, one after the other.
- `<name>.znippy` holds the index, a JSON document. It has one row per file.
  Each row records the file's path as it was found while walking the input,
  whether the file was compressed, and its uncompressed size. It also records
  a checksum of the whole file and the offset and length of each chunk in
  `.zdata`.

Files are read in chunks of 10 MiB, and each chunk is compressed with zstd at
level 19. Some files are stored as they are, because their extension marks
them as most likely compressed already. These include archives such as
`.zip`, `.gz`, `.7z` and `.zst`, and media such as `.jpg`, `.png` and
`.webm`. Chunks are compressed on a pool of worker threads. Checksums are
BLAKE2b digests of 32 bytes. Each chunk's digest is taken over its stored
bytes, and the file checksum is a digest of those chunk digests in order. A
file without chunks gets 32 zero bytes.

## Installation

```
pip install .
```

To include the test dependencies:

```
pip install .[test]
```

## Command line

Compress a directory:

```
znippy compress --input ./my_dir --output ./backup/my_dir
```

This writes `./backup/my_dir.znippy` and `./backup/my_dir.zdata`. Any suffix
on `--output` is replaced by these two. The directory `./backup` must already
exist. Subdirectories are walked in sorted order, and symbolic links are
skipped. If `--input` is a single file, only that file is archived. Add
`--no-skip` to compress every file, including those that look compressed
already.

When the run finishes, a report lists:

- the number of files and directories;
- how many files were compressed and how many were stored as they are;
- the number of bytes read and written;
- the compression ratio.

The ratio is the compressed input bytes divided by the bytes written for
them, as a percentage. It is only worked out when at least one file was
stored as it is; otherwise it is reported as 0.00%.

Extract an archive and check every file against its stored checksum:

```
znippy decompress --input ./backup/my_dir.znippy --output ./restored
```

List what an archive holds. Each file gets one line, with its path, whether
it was compressed, its size, its chunk count and its checksum:

```
znippy list --input ./backup/my_dir.znippy
```

Verify an archive's checksums without writing anything:

```
znippy verify --input ./backup/my_dir.znippy
```

`decompress` and `verify` both report the total, verified and corrupt files,
and the byte counts for each.

The exit status is 0 on success. It is 1 when a file cannot be read or
written, or when the index or data file is invalid or truncated. Log output
goes to standard error. Its level is set by the `ZNIPPY_LOG` environment
variable, for example `ZNIPPY_LOG=debug`; the default is `WARNING`.

## Library use

```python
from pathlib import Path

from znippy.packer import compress_dir
from znippy.decompress import extract_archive, verify_archive_integrity
from znippy.index import read_index, list_archive_contents

report = compress_dir(Path("my_dir"), Path("backup/my_dir"), False)
print(report.total_files, report.compression_ratio)

rows = read_index(Path("backup/my_dir.znippy"))
for row in rows:
    print(row.relative_path, row.uncompressed_size)

result = verify_archive_integrity(Path("backup/my_dir.znippy"))
print(result.verified_files, result.corrupt_files)

extract_archive(Path("backup/my_dir.znippy"), Path("restored"))
```

Other parts of the package:

- `znippy.index` has the index records, `IndexRow` and `IndexChunk`. It also
  has `build_index`, `add_file_checksums_and_cleanup`, `write_index`,
  `read_index` and `convert_to_compact`.
- `znippy.decompress` has `decompress_archive(index_path, save_data,
  out_dir)`. It also has `decompress_chunk_stream`, which decompresses one or
  more concatenated zstd frames and raises `DecompressionError` on bad
  input, and `extract_file_checksums`.
- `znippy.meta` has the records `ChunkMeta`, `ChunkMetaCompact`,
  `WriterStats`, `FileMeta`, `ChunkGroup` and `CompressionReport`.
- `znippy.config.get_config()` returns the settings for a run, as a
  `StrategicConfig`, and computes them once per process. They hold:
  - the worker counts: 90% of the physical cores, rounded up, for chunk
    work, and the rest for zstd's own threads;
  - the chunk size;
  - the number of chunk buffers: the available memory divided by the chunk
    size, capped at 64;
  - the compression level;
  - the zstd output buffer size.
- `znippy.int_ring.RingBuffer` is a fixed-capacity FIFO of integers.
- `znippy.chunks` has `ChunkRevolver` and `ChunkPool`, preallocated chunk
  buffers recycled through a ring of free indexes, and `IterRevolver`, an
  endless iterator that cycles over a sequence.
- `znippy.skip.should_skip_compression` and
  `znippy.index.is_probably_compressed` decide from a path's name whether a
  file is stored as it is. They use different lists of extensions. The
  archiver uses the one in `znippy.index`.

## What it does not do

- Extraction does not restore file names or the directory tree. Each
  verified file is written into the output directory as `file_<n>`, where
  `<n>` is its position in the index.
- File permissions, owners, timestamps and symbolic links are not recorded.
- There is no way to extract only some of the files, or to add files to an
  existing archive.
- Files whose checksum does not match, or whose chunks fail to decompress,
  are counted as corrupt and are not written.