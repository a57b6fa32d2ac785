"""Basic usage: store, read, update, list and delete fragments."""

from fragstore import FragmentRepository, InMemoryBlobStore, InMemoryMetadataStore, NotFoundError

# A repository pairs a metadata store with a blob store.
# The in-memory pair is the quickest way to try things out.
repository = FragmentRepository(InMemoryMetadataStore(), InMemoryBlobStore())
owner = "user-1"

# Create a fragment from raw bytes and a Content-Type
note = repository.create_fragment(owner, "text/markdown; charset=utf-8", b"# Shopping\n\n- milk\n")
print(f"Created {note.id} ({note.mime_type}, {note.size} bytes)")
print(f"  formats = {note.formats}")

# Read metadata and data back
print(f"  data = {repository.get_fragment_data(owner, note.id)!r}")

# Replace the data; id, owner_id, type and created stay fixed
updated = repository.update_fragment_data(owner, note.id, b"# Shopping\n\n- milk\n- eggs\n")
print(f"\nUpdated size {note.size} -> {updated.size}, created unchanged: {updated.created == note.created}")

# List fragments as IDs or as full metadata
repository.create_fragment(owner, "application/json", b'{"done": false}')
print(f"\nIDs: {repository.list_fragments(owner)}")
for fragment in repository.list_fragments(owner, expand=True):
    print(f"  {fragment.id[:8]}... {fragment.type} {fragment.size}B")

# Delete, then observe NotFoundError
repository.delete_fragment(owner, note.id)
try:
    repository.get_fragment(owner, note.id)
except NotFoundError as exc:
    print(f"\nAfter delete: {exc}")
