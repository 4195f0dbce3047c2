"""
CSV reader for contributed survey tables.
"""

import csv
import os
from typing import Optional

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.types import StructType

from survey_curation.observability.logger import get_logger

logger = get_logger(__name__)

CANDIDATE_DELIMITERS = ",;\t|"


def sniff_delimiter(file_path: str, encoding: str = "UTF-8") -> str:
    """
    Guess the delimiter from the header line, defaulting to a comma.

    Contributors export from spreadsheets in many locales, so ";" and tab
    separated files are common.
    """
    if not os.path.isfile(file_path):
        return ","
    with open(file_path, encoding=encoding, newline="") as handle:
        header = handle.readline().rstrip("\r\n")
    try:
        return csv.Sniffer().sniff(header, delimiters=CANDIDATE_DELIMITERS).delimiter
    except csv.Error:
        return ","


class CSVReader:
    """
    Reads a contributed CSV into a Spark DataFrame.

    Column types are inferred unless a schema is passed. Values are kept as
    read: blank markers and padding are the FieldNormalizer's job, and the
    schema gate needs the types as the contributor sent them.
    """

    def __init__(self, spark: SparkSession):
        self.spark = spark

    def read(
        self,
        file_path: str,
        schema: Optional[StructType] = None,
        header: bool = True,
        delimiter: Optional[str] = None,
        infer_schema: bool = True,
        encoding: str = "UTF-8",
    ) -> DataFrame:
        """
        Args:
            file_path: Path to the CSV file
            schema: Explicit schema; disables inference
            header: Whether the first line holds column names
            delimiter: Field delimiter; sniffed from the header line when omitted
            infer_schema: Infer column types when no schema is given
            encoding: File encoding

        Returns:
            Spark DataFrame
        """
        if delimiter is None:
            delimiter = sniff_delimiter(file_path, encoding)
            logger.debug("Delimiter detected", extra={"file_path": file_path, "delimiter": delimiter})

        options = {
            "header": str(header).lower(),
            "delimiter": delimiter,
            "encoding": encoding,
            "mode": "PERMISSIVE",
            "ignoreLeadingWhiteSpace": "true",
            "ignoreTrailingWhiteSpace": "true",
        }
        reader = self.spark.read.options(**options)
        if schema is not None:
            reader = reader.schema(schema)
        elif infer_schema:
            reader = reader.option("inferSchema", "true")
        return reader.csv(file_path)
