"""Module to export the storefront schema as a SQL DDL file."""

import os

from storefront.config import SCHEMA_DIALECT, SCHEMA_OUTPUT_PATH
from storefront.logger import Logger
from storefront.tools import render_schema_ddl

# Set up logger
logger = Logger.get_logger(__name__)


class SchemaExporter:
    """
    Class to render the schema DDL for one dialect and write it to disk.
    """

    def __init__(self, dialect_name: str, output_path: str):
        self.dialect_name = dialect_name
        self.output_path = output_path

    def export_schema(self) -> str:
        """Render the DDL and write it to the output path"""
        ddl = render_schema_ddl(self.dialect_name)

        output_dir = os.path.dirname(self.output_path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)

        with open(self.output_path, "w", encoding="utf-8") as file:
            file.write(ddl)

        logger.info(f"Wrote {self.dialect_name} schema to {self.output_path}")
        return ddl

    def __call__(self):
        """Main function to export"""
        self.export_schema()


if __name__ == "__main__":
    schema_exporter = SchemaExporter(
        dialect_name=SCHEMA_DIALECT,
        output_path=SCHEMA_OUTPUT_PATH,
    )
    schema_exporter()
