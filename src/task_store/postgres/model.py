from sqlalchemy import Boolean, Column, MetaData, String, Table, Text


def build_task_table(metadata: MetaData, table_name: str) -> Table:
    return Table(
        table_name,
        metadata,
        Column("id", String, primary_key=True),
        Column("content", Text, nullable=False),
        Column("completed", Boolean, nullable=False),
    )
