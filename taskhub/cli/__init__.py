from .commands import main, run_cli
from .forward import forward_args, take_descriptor_flag

__all__ = ["main", "run_cli", "forward_args", "take_descriptor_flag"]
