"""
Utility Functions
=================

Mesh loading, saving, and sample mesh creation utilities.
"""

from typing import Optional

import numpy as np
import trimesh


def load_mesh(path: str) -> trimesh.Trimesh:
    """
    Load a mesh from file.

    Supports: OBJ, PLY, STL, OFF, and other formats supported by trimesh.
    Scenes are flattened into a single mesh.

    Args:
        path: Path to mesh file

    Returns:
        Loaded trimesh object
    """
    mesh = trimesh.load(path, force='mesh')

    if isinstance(mesh, trimesh.Scene):
        meshes = [g for g in mesh.geometry.values() if isinstance(g, trimesh.Trimesh)]
        if not meshes:
            raise ValueError(f"No valid meshes found in {path}")
        mesh = trimesh.util.concatenate(meshes)

    return mesh


def save_mesh(mesh: trimesh.Trimesh, path: str):
    """
    Save a mesh to file.

    Args:
        mesh: Mesh to save
        path: Output path
    """
    mesh.export(path)
    print(f"Saved mesh to: {path}")


def create_sample_mesh(mesh_type: str = "sphere") -> trimesh.Trimesh:
    """
    Create a sample mesh for testing.

    Args:
        mesh_type: Type of mesh to create:
            - "cube": Unit cube (8 vertices, 12 faces)
            - "sphere": Icosphere
            - "torus": Torus
            - "cylinder": Capped cylinder
            - "grid": Open wavy grid (boundary vertices are seams)

    Returns:
        Generated trimesh object
    """
    if mesh_type == "cube":
        mesh = trimesh.creation.box(extents=[1, 1, 1])
    elif mesh_type == "torus":
        mesh = trimesh.creation.torus(major_radius=1.0, minor_radius=0.3,
                                      major_sections=48, minor_sections=24)
    elif mesh_type == "cylinder":
        mesh = trimesh.creation.cylinder(radius=0.5, height=2.0, sections=48)
    elif mesh_type == "grid":
        mesh = create_mesh_with_boundary()
    elif mesh_type == "sphere":
        mesh = trimesh.creation.icosphere(subdivisions=3, radius=1.0)
    else:
        raise ValueError(f"Unknown sample mesh type '{mesh_type}'")

    print(f"Created {mesh_type} mesh: {len(mesh.vertices)} vertices, {len(mesh.faces)} faces")
    return mesh


def create_mesh_with_boundary(rows: int = 20, cols: int = 20,
                              noise: float = 0.0,
                              seed: Optional[int] = None) -> trimesh.Trimesh:
    """
    Create an open wavy surface grid.

    Its border vertices cannot be collapsed, which makes it useful for
    checking seam preservation.

    Args:
        rows: Number of rows in the grid
        cols: Number of columns in the grid
        noise: Standard deviation of random vertex jitter
        seed: Random seed for the jitter

    Returns:
        Open surface mesh
    """
    x = np.linspace(-1, 1, cols)
    y = np.linspace(-1, 1, rows)
    X, Y = np.meshgrid(x, y)

    Z = 0.2 * np.sin(3 * X) * np.cos(3 * Y)

    vertices = np.column_stack([X.flatten(), Y.flatten(), Z.flatten()])

    # Two triangles per grid cell
    faces = []
    for i in range(rows - 1):
        for j in range(cols - 1):
            idx = i * cols + j
            faces.append([idx, idx + 1, idx + cols])
            faces.append([idx + 1, idx + cols + 1, idx + cols])

    if noise > 0:
        rng = np.random.default_rng(seed)
        vertices = vertices + rng.normal(scale=noise, size=vertices.shape)

    return trimesh.Trimesh(vertices=vertices, faces=np.array(faces), process=False)


def get_mesh_info(mesh: trimesh.Trimesh) -> dict:
    """
    Get basic information about a mesh.

    Args:
        mesh: Input mesh

    Returns:
        Dictionary of mesh properties
    """
    info = {
        'vertices': len(mesh.vertices),
        'faces': len(mesh.faces),
        'is_watertight': mesh.is_watertight,
        'is_winding_consistent': mesh.is_winding_consistent,
        'euler_number': mesh.euler_number,
        'area': float(mesh.area),
    }

    edge_count = {}
    for face in mesh.faces:
        for i in range(3):
            edge = tuple(sorted([face[i], face[(i + 1) % 3]]))
            edge_count[edge] = edge_count.get(edge, 0) + 1

    info['boundary_edges'] = sum(1 for count in edge_count.values() if count == 1)

    return info


def print_mesh_info(mesh: trimesh.Trimesh, name: str = "Mesh"):
    """
    Print mesh information to console.

    Args:
        mesh: Input mesh
        name: Name to display
    """
    info = get_mesh_info(mesh)

    print(f"\n{name} Information:")
    print("-" * 40)
    print(f"  Vertices:        {info['vertices']}")
    print(f"  Faces:           {info['faces']}")
    print(f"  Boundary Edges:  {info['boundary_edges']}")
    print(f"  Watertight:      {info['is_watertight']}")
    print(f"  Euler Number:    {info['euler_number']}")
    print(f"  Surface Area:    {info['area']:.4f}")
