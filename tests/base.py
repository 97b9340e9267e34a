import unittest
from typing import List, Optional

from sqlalchemy import ForeignKey, Integer, String, create_engine, delete
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import DeclarativeBase, Mapped, column_property, mapped_column, relationship, sessionmaker
from sqlalchemy.pool import StaticPool


class _Base(DeclarativeBase):
    pass


class Author(_Base):
    __tablename__ = "_grid_authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    nickname: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    display_name: Mapped[str] = column_property(name + " (" + email + ")")

    books: Mapped[List["Book"]] = relationship(back_populates="author")


class Book(_Base):
    __tablename__ = "_grid_books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    price: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, default=0)
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    author_id: Mapped[Optional[int]] = mapped_column(ForeignKey("_grid_authors.id"), nullable=True)

    author: Mapped[Optional[Author]] = relationship(back_populates="books")

    @hybrid_property
    def total_price(self):
        return self.price * self.quantity


class ListingDbTestCase(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.engine = create_engine(
            "sqlite+pysqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        cls.SessionLocal = sessionmaker(bind=cls.engine, autocommit=False, autoflush=False)
        _Base.metadata.create_all(cls.engine)

    @classmethod
    def tearDownClass(cls):
        _Base.metadata.drop_all(cls.engine)
        cls.engine.dispose()

    def setUp(self):
        with self.SessionLocal() as db:
            db.execute(delete(Book))
            db.execute(delete(Author))
            db.commit()
