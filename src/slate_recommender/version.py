"""
Version constants for the slate recommendation pipeline.

Component versions are recorded so a persisted slate can be traced back to
the code that produced it.
"""

# API Version
API_VERSION = "1.0.0"

# Component versions (update these when implementations change)
CANDIDATE_SOURCE_VERSION = "candidates-1.0.0"
SCORER_VERSION = "scorer-1.0.0"
DIVERSITY_VERSION = "diversity-1.0.0"


def get_component_versions() -> dict:
    """
    Get current component versions.

    Returns:
        Mapping of component name to version string
    """
    return {
        "api": API_VERSION,
        "candidate_source": CANDIDATE_SOURCE_VERSION,
        "scorer": SCORER_VERSION,
        "diversity": DIVERSITY_VERSION,
    }
