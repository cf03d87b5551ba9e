from .demo import (  # noqa: F401
    bootstrap_factory,
    list_members,
    rename_and_remove,
    run_demo,
    seed_sample_data,
)

__all__ = [
    "bootstrap_factory",
    "seed_sample_data",
    "rename_and_remove",
    "list_members",
    "run_demo",
]
