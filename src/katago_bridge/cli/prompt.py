"""
Interactive choice of the engine build.
"""

from typing import Callable, Optional

from katago_bridge.platforms import Variant

_CHOICES = {
    "1": Variant.GPU,
    "2": Variant.CPU,
    "gpu": Variant.GPU,
    "cpu": Variant.CPU,
}


def choose_variant(
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
    max_attempts: Optional[int] = None,
) -> Variant:
    """
    Ask which KataGo build to download until a valid answer is given.

    Args:
        input_fn: reads one line (``input`` by default)
        output_fn: prints one line (``print`` by default)
        max_attempts: give up with ``ValueError`` after this many invalid
            answers; ``None`` keeps asking

    Raises:
        EOFError: stdin closed before a valid answer
        ValueError: ``max_attempts`` invalid answers
    """
    output_fn("Choose KataGo version:")
    for index, variant in enumerate(Variant, start=1):
        output_fn(f"{index}. {variant.label}")

    attempts = 0
    while max_attempts is None or attempts < max_attempts:
        answer = input_fn("> ").strip().lower()
        variant = _CHOICES.get(answer)
        if variant is not None:
            output_fn(f"Using {variant.label} KataGo version.")
            return variant
        attempts += 1
        output_fn("Invalid choice. Please enter 1 or 2.")

    raise ValueError(f"no valid choice after {attempts} attempts")


def fixed_variant(variant: Variant) -> Callable[[], Variant]:
    """A chooser that always answers ``variant`` without prompting."""
    return lambda: variant
