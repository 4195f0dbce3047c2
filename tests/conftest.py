"""
Pytest configuration and fixtures for survey-curation tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
from pathlib import Path
from typing import Generator

import pytest
from pyspark.sql import SparkSession

from survey_curation.core.rules import CurationConfig


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require Spark"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that run several pipeline stages or Spark"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests from input file to written artifacts"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# SPARK FIXTURES
# =======================

@pytest.fixture(scope="session")
def spark_session() -> Generator[SparkSession, None, None]:
    """
    Create a Spark session for testing with local mode

    Yields:
        SparkSession configured for local testing
    """
    spark = (
        SparkSession.builder
        .appName("survey-curation-test")
        .master("local[2]")
        .config("spark.sql.shuffle.partitions", "2")
        .config("spark.driver.memory", "1g")
        .config("spark.ui.enabled", "false")  # Disable UI for tests
        .getOrCreate()
    )

    # Set log level to WARN to reduce test output noise
    spark.sparkContext.setLogLevel("WARN")

    yield spark

    spark.stop()


# =======================
# TEST DATA FIXTURES
# =======================

@pytest.fixture
def test_data_dir() -> Path:
    """Directory holding fixture files"""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def fixed_site_config() -> CurationConfig:
    """Spider pitfall survey at one fixed site, counts per month"""
    return CurationConfig.model_validate({
        "studyId": "512",
        "columnMapping": {
            "abundance": "Count",
            "taxon": "Species",
            "family": "Family",
            "year": "Year",
            "month": "Month",
        },
        "fixedCoordinates": [51.75, 1.25],
        "genusCorrections": {"Aranaeus": "Araneus"},
    })


@pytest.fixture
def fixed_site_rows() -> list[dict]:
    """
    10 rows: 2 years, 1 site, 3 taxa.

    Rows 1 and 4 are the same taxon at the same sampling event; row 6 has a
    zero count.
    """
    columns = ["Count", "Species", "Family", "Year", "Month"]
    values = [
        (3, "Lycosa sp1", "Lycosidae", 1998, 6),
        (5, "Lycosa sp. 2", "Lycosidae", 1998, 6),
        (2, "Aranaeus sp.", "Araneidae", 1998, 6),
        (4, "Lycosa sp1", "Lycosidae", 1998, 6),
        (1, "Lycosa sp1", "Lycosidae", 1998, 7),
        (0, "Araneus sp.", "Araneidae", 1998, 7),
        (6, "Lycosa sp1", "Lycosidae", 1999, 6),
        (2, "Lycosa sp2", "Lycosidae", 1999, 6),
        (9, "Araneus sp.", "Araneidae", 1999, 6),
        (1, "Araneus sp.", "Araneidae", 1999, 7),
    ]
    return [dict(zip(columns, row)) for row in values]


@pytest.fixture
def plot_config() -> CurationConfig:
    """Marine quadrat survey with mapped coordinates and plots"""
    return CurationConfig.model_validate({
        "studyId": "77",
        "columnMapping": {
            "abundance": "Abundance",
            "biomass": "Biomass",
            "genus": "Genus",
            "species": "Species",
            "family": "Family",
            "latitude": "Lat",
            "longitude": "Long",
            "plot": "Quadrat",
            "day": "Day",
            "month": "Month",
            "year": "Year",
        },
        "poolFields": ["Replicate"],
        "poolExemptTaxa": ["Patella vulgata"],
        "secondaryFieldRenames": {"Q 1": "Q1"},
        "unrecoverableFields": ["plot"],
    })


@pytest.fixture
def plot_rows() -> list[dict]:
    """Two quadrats at two sites, with replicate subdivisions"""
    columns = ["Abundance", "Biomass", "Genus", "Species", "Family", "Lat", "Long",
               "Quadrat", "Replicate", "Day", "Month", "Year"]
    values = [
        ("2", "", "Littorina", "littorea", "Littorinidae", "50.1", "4.2", "Q1", "a", "3", "5", "2001"),
        ("3", "", "Littorina", "littorea", "Littorinidae", "50.1", "4.2", "Q 1", "b", "3", "5", "2001"),
        ("1", "0.5", "Patella", "vulgata", "Patellidae", "50.1", "4.2", "Q1", "a", "3", "5", "2001"),
        ("1", "0.7", "Patella", "vulgata", "Patellidae", "50.1", "4.2", "Q1", "b", "3", "5", "2001"),
        ("4", "", "Nucella", "lapillus", "Muricidae", "50.3", "4.6", "Q2", "a", "3", "5", "2001"),
        ("5", "", "Nucella", "lapillus", "Muricidae", "50.3", "-5", "Q2", "a", "3", "5", "2001"),
        ("NA", "", "Nucella", "lapillus", "Muricidae", "50.3", "4.6", "Q2", "b", "3", "5", "2001"),
    ]
    return [dict(zip(columns, row)) for row in values]
