"""Configuration loader and validation for matching settings."""

from decimal import Decimal
from pathlib import Path
from typing import Any, Literal, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Built-in canonical vendor names and the fragments that identify them.
# Order matters: the first canonical key with a matching fragment wins.
BASE_VENDOR_SYNONYMS: dict[str, list[str]] = {
    "CITI CARD": ["CITIBANK", "CITI CARD ONLINE", "CITICTP"],
    "BANK OF AMERICA": ["BK OF", "BK OF AMER VISA", "BANK OF AMERICA"],
    "CHASE": ["CHASE CREDIT CARD", "CHASE CARD", "CHASE BANK"],
    "SBA": ["SBA LOAN", "SBA EIDL", "SBA EIDL LOAN"],
    "BRANDUSA": ["BRANDUSA NIRO", "BRANDUSA"],
    "KATERINA": ["KATRINA", "KATERINA OHANYAN", "KATRINA OHANYAN"],
}


# Logical field -> column header. A partial column_mappings falls back to these.
BANK_COLUMN_DEFAULTS: dict[str, str] = {
    "date": "Date",
    "type": "Type",
    "vendor": "Vendor",
    "description": "Description",
    "amount": "Amount",
    "source_file": "Source_File",
}

LEDGER_COLUMN_DEFAULTS: dict[str, str] = {
    "date": "Date",
    "transaction_id": "Trans #",
    "type": "Type",
    "account": "Account",
    "name": "Name",
    "memo": "Memo",
    "split": "Split",
    "debit": "Debit",
    "credit": "Credit",
    "amount": "Amount",
}


class BankInputConfig(BaseModel):
    """Configuration for bank statement CSV parsing."""

    encoding: str = "utf-8"
    excluded_types: list[str] = Field(default_factory=lambda: ["Fee"])
    column_mappings: dict[str, str] = Field(
        default_factory=lambda: dict(BANK_COLUMN_DEFAULTS)
    )


class LedgerInputConfig(BaseModel):
    """Configuration for accounting ledger export parsing."""

    encoding: str = "utf-8"
    header_markers: list[str] = Field(default_factory=lambda: ["Trans #", "Date"])
    header_search_rows: int = 5
    default_header_row: int = 2
    account_filters: list[str] = Field(
        default_factory=lambda: ["Operating Account", "Chase 0275"]
    )
    column_mappings: dict[str, str] = Field(
        default_factory=lambda: dict(LEDGER_COLUMN_DEFAULTS)
    )


class InputConfig(BaseModel):
    """Configuration for input file parsing."""

    bank: BankInputConfig = Field(default_factory=BankInputConfig)
    ledger: LedgerInputConfig = Field(default_factory=LedgerInputConfig)


class ExactPassConfig(BaseModel):
    enabled: bool = True


class NearDatePassConfig(BaseModel):
    """Date-window passes; one pass runs per window, in list order."""

    enabled: bool = True
    windows: list[int] = Field(default_factory=lambda: [3, 7])


class SplitPassConfig(BaseModel):
    enabled: bool = True
    window_days: int = 5
    tolerance: Decimal = Decimal("0.01")
    max_size: int = Field(default=3, ge=2, le=3)


class FuzzyAmountPassConfig(BaseModel):
    enabled: bool = True
    window_days: int = 3
    tolerance: Decimal = Decimal("1.00")


class VendorTypePassConfig(BaseModel):
    enabled: bool = True
    window_days: int = 3
    similarity_threshold: float = Field(default=0.6, ge=0.0, le=1.0)


class TypeCompatibilityConfig(BaseModel):
    """Ledger types accepted for each bank category by the vendor pass."""

    deposit: list[str] = Field(
        default_factory=lambda: ["Deposit", "Payment", "Sales Receipt", "Invoice Payment"]
    )
    withdrawal: list[str] = Field(
        default_factory=lambda: [
            "Check",
            "Bill Pmt -Check",
            "Transfer",
            "Expense",
            "Credit Card",
        ]
    )


class MatchingConfig(BaseModel):
    """Configuration for the matching engine. Pass order is fixed."""

    exact: ExactPassConfig = Field(default_factory=ExactPassConfig)
    near_date: NearDatePassConfig = Field(default_factory=NearDatePassConfig)
    split: SplitPassConfig = Field(default_factory=SplitPassConfig)
    fuzzy_amount: FuzzyAmountPassConfig = Field(default_factory=FuzzyAmountPassConfig)
    vendor_type: VendorTypePassConfig = Field(default_factory=VendorTypePassConfig)
    type_compatibility: TypeCompatibilityConfig = Field(
        default_factory=TypeCompatibilityConfig
    )


class VendorConfig(BaseModel):
    """Configuration for vendor name normalization."""

    base_synonyms: dict[str, list[str]] = Field(
        default_factory=lambda: dict(BASE_VENDOR_SYNONYMS)
    )
    peer_payment_marker: str = "ZELLE"
    routing_token: str = "JPM"
    strip_prefixes: list[str] = Field(
        default_factory=lambda: [
            "ORIG CO NAME:",
            "PAYMENT TO",
            "ZELLE PAYMENT TO",
            "ZELLE PAYMENT FROM",
        ]
    )
    # How an external mapping treats a canonical key already in base_synonyms
    synonym_precedence: Literal["extend", "override"] = "extend"


class ExcelOutputConfig(BaseModel):
    """Configuration for the optional Excel workbook."""

    enabled: bool = False
    filename_template: str = "{year}_Reconciliation_Report.xlsx"
    sheets: dict[str, str] = Field(
        default_factory=lambda: {
            "summary": "Summary",
            "matched": "Matched",
            "unmatched_bank": "Unmatched Bank",
            "unmatched_ledger": "Unmatched Ledger",
            "breakdown": "Match Breakdown",
        }
    )


class OutputConfig(BaseModel):
    """Configuration for output files."""

    directory_template: str = "GL_Matching_Results_{year}_{timestamp}"
    matched_filename: str = "{year}_Matched_Transactions.csv"
    unmatched_bank_filename: str = "{year}_Unmatched_Bank.csv"
    unmatched_ledger_filename: str = "{year}_Unmatched_Ledger.csv"
    report_filename: str = "{year}_Reconciliation_Report.txt"
    excel: ExcelOutputConfig = Field(default_factory=ExcelOutputConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


class ReconConfig(BaseModel):
    """Main configuration model for reconciliation."""

    input: InputConfig = Field(default_factory=InputConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    vendors: VendorConfig = Field(default_factory=VendorConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a plain dictionary."""
    return ReconConfig().model_dump(mode="json", exclude={"config_file_path"})


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file is unreadable or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

        # Deep merge user config into defaults
        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def load_vendor_mappings(mappings_path: Path) -> dict[str, list[str]]:
    """
    Load an externally produced vendor synonym mapping.

    The file is JSON or YAML shaped as ``{canonical: [fragment, ...]}``;
    key order is preserved.

    Raises:
        ConfigurationError: If the file cannot be read or has the wrong shape
    """
    try:
        with open(mappings_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read vendor mappings {mappings_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError("Vendor mappings must be a mapping of name -> list of variants")

    mappings: dict[str, list[str]] = {}
    for canonical, variants in data.items():
        if isinstance(variants, str):
            variants = [variants]
        if not isinstance(variants, list) or not all(isinstance(v, str) for v in variants):
            raise ConfigurationError(
                f"Vendor mapping for {canonical!r} must be a list of strings"
            )
        mappings[str(canonical)] = variants

    logger.info(f"Loaded {len(mappings)} vendor mapping groups from {mappings_path}")
    return mappings


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# Bank to accounting ledger matching configuration
# Generated configuration file - customize as needed

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
