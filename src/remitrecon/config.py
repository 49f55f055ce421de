"""Configuration management for RemitRecon."""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_NON_COVERED_CODES = ("50", "96", "109")


class MatchingPolicy(BaseModel):
    """Policy constants used by the matching and posting pipeline.

    Defaults reproduce the thresholds the billing team has always used.
    A policy is read-only once built, so one instance can be shared by
    every worker in a batch.
    """

    model_config = ConfigDict(frozen=True)

    # Monetary equality
    money_tolerance: Decimal = Field(
        Decimal("0.01"), gt=0, description="Amounts closer than this are equal"
    )

    # Variance classification (percent, negative = underpayment)
    significant_underpayment_pct: Decimal = Field(Decimal("-50"))
    review_underpayment_pct: Decimal = Field(Decimal("-10"))

    # Auto-post veto (absolute percent)
    auto_post_max_variance_pct: Decimal = Field(Decimal("10"), ge=0)

    # Suggested-action thresholds (percent)
    action_significant_underpayment_pct: Decimal = Field(Decimal("-25"))
    action_minor_underpayment_pct: Decimal = Field(Decimal("-5"))

    # CARC codes that mark a service line as not covered
    non_covered_reason_codes: frozenset[str] = Field(
        default=frozenset(DEFAULT_NON_COVERED_CODES)
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Policy
    money_tolerance: Decimal = Decimal("0.01")
    significant_underpayment_pct: Decimal = Decimal("-50")
    review_underpayment_pct: Decimal = Decimal("-10")
    auto_post_max_variance_pct: Decimal = Decimal("10")
    action_significant_underpayment_pct: Decimal = Decimal("-25")
    action_minor_underpayment_pct: Decimal = Decimal("-5")
    non_covered_reason_codes: list[str] = list(DEFAULT_NON_COVERED_CODES)

    # Write-off rules (JSON file, built-in table when unset)
    writeoff_rules_path: Path | None = None

    # Batch execution
    batch_max_workers: int = 4
    parallel_batch_threshold: int = 500

    def policy(self) -> MatchingPolicy:
        """Build the matching policy from these settings."""
        return MatchingPolicy(
            money_tolerance=self.money_tolerance,
            significant_underpayment_pct=self.significant_underpayment_pct,
            review_underpayment_pct=self.review_underpayment_pct,
            auto_post_max_variance_pct=self.auto_post_max_variance_pct,
            action_significant_underpayment_pct=self.action_significant_underpayment_pct,
            action_minor_underpayment_pct=self.action_minor_underpayment_pct,
            non_covered_reason_codes=frozenset(self.non_covered_reason_codes),
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
