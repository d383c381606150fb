"""Domain layer: exceptions shared by every layer."""
