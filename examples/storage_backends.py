"""Storage backends and environment-driven wiring."""

import os
import tempfile
from pathlib import Path

from fragstore import FileBlobStore, FileMetadataStore, FragmentRepository, configure, get_settings

# ---- File stores ----
# Metadata and data live in separate directory trees, one directory per owner.

with tempfile.TemporaryDirectory() as tmpdir:
    root = Path(tmpdir)
    repository = FragmentRepository(FileMetadataStore(root / "metadata"), FileBlobStore(root / "data"))
    fragment = repository.create_fragment("user-1", "text/plain", b"persistent data")
    print(f"[File] {fragment.id[:8]}... written under {root}")
    for path in sorted(root.rglob("*")):
        if path.is_file():
            print(f"  {path.relative_to(root)}")

    # A second repository over the same directories sees the same fragments.
    reopened = FragmentRepository(FileMetadataStore(root / "metadata"), FileBlobStore(root / "data"))
    print(f"  reopened data = {reopened.get_fragment_data('user-1', fragment.id)!r}")

# ---- Environment ----
# FRAGSTORE_BACKEND selects memory, file or aws. The aws backend also needs
# AWS_S3_BUCKET_NAME and AWS_DYNAMODB_TABLE_NAME (plus endpoint URLs for a
# local emulator).

os.environ.setdefault("FRAGSTORE_BACKEND", "memory")
settings = get_settings()
repository = configure(settings)
print(f"\n[Env] backend={settings.backend}, metadata={type(repository.metadata).__name__}")
