from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchone, load_json
from .model import FormSchema
from .repository import FormSchemaRepository


class MySQLFormSchemaRepository(FormSchemaRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, form_name: str) -> Optional[FormSchema]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT form_name, version, description, sections
                FROM form_schemas
                WHERE form_name=%s
                """,
                (form_name,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return FormSchema.from_dict(
                r["form_name"],
                {
                    "version": r.get("version"),
                    "description": r.get("description"),
                    "sections": load_json(r.get("sections"), []),
                },
            )

    def save(self, schema: FormSchema) -> None:
        payload = schema.to_dict()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO form_schemas(form_name, version, description, sections)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    version=VALUES(version),
                    description=VALUES(description),
                    sections=VALUES(sections)
                """,
                (schema.form_name, schema.version, schema.description, dump_json(payload["sections"])),
            )
