"""SDF path tracer built on Taichi.

This package renders a room with a patterned ceiling and a sky light by
sphere marching a signed distance field and integrating light transport
with Monte Carlo path tracing:
- Implicit scene built from box primitives with CSG operators
- Sphere-tracing ray marcher with finite-difference normals
- Bounded path tracer with diffuse, mirror and emissive responses
- Reproducible per-sample random streams and progressive accumulation

Subpackages:
    core: Vector utilities, random streams, integrator and rendering loop
    geometry: Distance field primitives (boxes, letters)
    materials: Diffuse and mirror scattering
    scene: Scene distance field and ray marcher
    camera: Camera model with primary ray generation
    preview: Tone mapping and image export
"""

__version__ = "0.1.0"
