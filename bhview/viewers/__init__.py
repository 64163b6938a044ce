"""VTK-based viewers and the controllers driving them."""
