from .pathing import project_root, resolve_config_path, resolve_project_path

__all__ = ["project_root", "resolve_config_path", "resolve_project_path"]
