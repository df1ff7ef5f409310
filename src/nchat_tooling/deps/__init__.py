"""Dependency installation: per-platform recipes selected by host identity."""

from .recipes import (
    RECIPES,
    AptRecipe,
    CommandRecipe,
    DarwinRecipe,
    DebianRecipe,
    InstallContext,
    InstallRecipe,
    Step,
    install_dependencies,
    load_package_table,
    run_steps,
    select_recipe,
)

__all__ = [
    "RECIPES",
    "AptRecipe",
    "CommandRecipe",
    "DarwinRecipe",
    "DebianRecipe",
    "InstallContext",
    "InstallRecipe",
    "Step",
    "install_dependencies",
    "load_package_table",
    "run_steps",
    "select_recipe",
]
