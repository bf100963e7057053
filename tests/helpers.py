"""Builders for small mysqldump documents used across the tests."""

TARGET = "sbc1.example.net:8888/stats"
URL = "http://" + TARGET

GROUP_ROW = {
    "trunkId": "T1",
    "alias": "A1",
    "fqdn": "Group",
    "numOrig": "10",
    "numTerm": "4",
    "cps": "0.5",
    "numPeak": "30",
    "totalCLZ": "120",
    "numCLZCps": "2",
    "totalLimit": "500",
    "cpsLimit": "25",
}


def table(name: str, *rows: dict) -> str:
    body = ""
    for row in rows:
        fields = "".join(f'<field name="{k}">{v}</field>' for k, v in row.items())
        body += f"<row>{fields}</row>"
    return f'<table name="{name}">{body}</table>'


def dump(*tables: str) -> bytes:
    return (
        '<?xml version="1.0"?><mysqldump><database name="SSConfig">'
        + "".join(tables)
        + "</database></mysqldump>"
    ).encode()
