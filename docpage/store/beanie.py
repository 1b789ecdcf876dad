"""Store over a beanie Document class. Collections are looked up lazily, after init_beanie."""

from typing import Any

from beanie import Document
from motor.motor_asyncio import AsyncIOMotorCollection

from docpage.store.motor import MotorStore


class BeanieStore(MotorStore):
    def __init__(self, document_cls: type[Document]) -> None:
        self.document_cls = document_cls
        self.name = document_cls.__name__

    def get_collection(self) -> AsyncIOMotorCollection:
        return self.document_cls.get_motor_collection()

    def get_refs(self) -> dict[str, Any]:
        # Link fields are stored as DBRefs into the linked model's collection
        links = self.document_cls.get_link_fields() or {}
        return {field: info.document_class.get_motor_collection() for field, info in links.items()}
