from pathlib import Path
from typing import List, Union

PathLike = Union[str, Path]


def build_analysis_command(
    binary_path: PathLike, model_path: PathLike, config_path: PathLike
) -> List[str]:
    """Command line for ``katago analysis``; ``binary_path`` is run as given."""
    return [
        str(binary_path),
        "analysis",
        "-model",
        str(model_path),
        "-config",
        str(config_path),
    ]
