"""ID and value generators (e.g. CUID, workflow ids, document numbers)."""

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_workflow_id() -> str:
    """Return a unique id for one workflow run (wf_<cuid>)."""
    return f"wf_{generate_cuid()}"


def format_sequence_number(prefix: str, sequence: int, width: int) -> str:
    """Format a human-facing document number, e.g. RCP-000001 or BILL-00001."""
    if sequence < 1:
        raise ValueError(f"sequence must be positive, got {sequence}")
    return f"{prefix}-{sequence:0{width}d}"
