"""
Sample firewall dump records for testing the ledger job.
"""

from datetime import datetime

NOW = datetime(2024, 2, 1, 12, 0, 0)


def make_row(
    date_time="2024/01/10 08:00:00",
    blocked="1",
    source_ip="203.0.113.50",
    destination_ip="10.0.0.1",
    description="[IPS> Port scan detected",
    priority="2",
):
    """Build a 13-column record in the producer's layout."""
    row = [""] * 13
    row[0] = "fw01"
    row[1] = priority
    row[2] = "ALERT"
    row[3] = description
    row[4] = date_time
    row[5] = "TCP"
    row[6] = source_ip
    row[7] = "45678"
    row[8] = "3306"
    row[9] = "eth0"
    row[10] = "IN"
    row[11] = blocked
    row[12] = destination_ip
    return row


def to_line(row, sep=", "):
    return sep.join(row)


def write_dump(path, rows):
    """Write rows as an unquoted dump file the way the firewall exports them."""
    path.write_text("\n".join(to_line(row) for row in rows) + "\n", encoding="utf-8")
    return path


SAMPLE_ROWS = [
    make_row(),
    make_row(),  # exact duplicate
    make_row(date_time="2024/01/20 09:15:00", source_ip="198.51.100.7", priority="1"),
    make_row(date_time="2024/01/21 10:00:00", blocked="0"),
    make_row(date_time="2023/11/01 00:00:00", source_ip="192.0.2.9"),
    make_row(date_time="not a date"),
    make_row(date_time="2024/01/25 23:59:59", description="Login brute force"),
]
