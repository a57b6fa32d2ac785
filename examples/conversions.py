"""Converting fragment data between supported formats."""

import io

from PIL import Image

from fragstore import FragmentRepository, InMemoryBlobStore, InMemoryMetadataStore, UnsupportedConversionError

repository = FragmentRepository(InMemoryMetadataStore(), InMemoryBlobStore())
owner = "user-1"

# ---- Text ----
# Targets are media types or file extensions.

doc = repository.create_fragment(owner, "text/markdown", b"# Hello\n\nSome *emphasis*.\n")
print(repository.convert(doc, "text/html").data.decode())
print(repository.convert(doc, "txt").data.decode())

# ---- Data ----

table = repository.create_fragment(owner, "text/csv", b"name,qty\nmilk,1\neggs,12\n")
as_json = repository.convert(table, ".json")
print(f"[{as_json.content_type}] {as_json.data.decode()}")

config = repository.create_fragment(owner, "application/json", b'{"debug": true, "workers": 4}')
print(f"[application/yaml]\n{repository.convert(config, 'yaml').data.decode()}")

# ---- Images ----

buffer = io.BytesIO()
Image.new("RGBA", (8, 8), (255, 0, 0, 128)).save(buffer, format="PNG")
image = repository.create_fragment(owner, "image/png", buffer.getvalue())
jpeg = repository.convert(image, "jpg")
print(f"PNG {image.size}B -> {jpeg.content_type} {len(jpeg.data)}B")

# ---- Illegal targets ----

try:
    repository.convert(doc, "image/png")
except UnsupportedConversionError as exc:
    print(f"\n{exc}")
