"""
gltfkit Quick Start Example

Loads a .glb/.gltf file and prints its mesh attributes and images.

Usage:
    python examples/quickstart.py model.glb
"""

import sys

from gltfkit import GLTFError, Resolver, load

doc = load(sys.argv[1])
res = Resolver(doc)

for m, mesh in enumerate(doc.meshes):
    for p, prim in enumerate(mesh.primitives):
        print(f"mesh {m} primitive {p} (mode {prim.mode})")
        for name, index in prim.attributes.model_dump(by_alias=True, exclude={'extensions', 'extras'}).items():
            if index is None:
                continue
            try:
                array = res.accessor_array(index)
                print(f"  {name}: {array.shape} {array.dtype}")
            except GLTFError as e:
                print(f"  {name}: skipped ({e})")

for i in range(len(doc.images)):
    try:
        data, mime = res.image(i)
        print(f"image {i}: {len(data)} bytes ({mime})")
    except GLTFError as e:
        print(f"image {i}: skipped ({e})")
