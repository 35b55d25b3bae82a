"""Deterministic quantity-survey (metraj) calculation and validation toolkit."""
from metraj_checker.application.use_cases import ProjectValidationContext, ValidateProjectUseCase
from metraj_checker.domain.calculator import calculate_quantity
from metraj_checker.domain.models import Category, Finding, LineItem, Severity
from metraj_checker.domain.services import StructuralRuleValidator, run_structural_rules
from metraj_checker.infrastructure.repositories.json_repositories import JsonProjectRepository

__all__ = [
    "calculate_quantity",
    "run_structural_rules",
    "StructuralRuleValidator",
    "LineItem",
    "Finding",
    "Severity",
    "Category",
    "ValidateProjectUseCase",
    "ProjectValidationContext",
    "JsonProjectRepository",
]
