"""CSV template generation."""

from pathlib import Path

from networth.csv.importer import CSV_COLUMNS

EXAMPLE_ROWS = [
    ["現金", "台新銀行", "30000", "2025/6/5", "包含餐費與交通"],
    ["台灣股票", "2330.TW", "200", "2025/6/5", "存股用"],
    ["台灣股票", "0056.TW", "1000", "2025/6/5", "存股用"],
    ["美國股票", "AMD", "120", "2025/6/5", ""],
    ["美國股票", "TSLA", "500", "2025/6/5", "長期持有"],
    ["房產", "新莊街90號3樓", "22000000", "2025/6/5", ""],
    ["房貸", "新莊街90號3樓", "5000000", "2025/6/5", ""],
    ["現金", "台北富邦銀行", "500000", "2025/6/5", ""],
    ["現金", "Chase", "12000", "2025/6/5", "USD 活存"],
    ["保險", "三商美邦", "2000000", "2025/6/5", "儲蓄險"],
    ["保險", "國泰人壽", "400000", "2025/6/5", "儲蓄險"],
]


class CsvTemplateGenerator:
    """Generator for CSV import templates."""

    def template_text(self) -> str:
        lines = [",".join(CSV_COLUMNS)] + [",".join(row) for row in EXAMPLE_ROWS]
        return "\n".join(lines) + "\n"

    def generate_template(self, path: str) -> None:
        """
        Generate a CSV template with headers and example rows.

        Args:
            path: Output file path for the template
        """
        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(self.template_text(), encoding="utf-8")
