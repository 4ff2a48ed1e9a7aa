"""
SQLAlchemy ORM Models for Product Search
========================================

Tables the product vector query reads from. The search subsystem never
writes to them; the models document the schema and let tests and tooling
create it.

Uses pgvector's vector type for cosine distance queries (``<=>``).
"""

from decimal import Decimal

from pgvector.sqlalchemy import Vector
from sqlalchemy import Float, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

EMBEDDING_DIMENSIONS = 1536


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class Product(Base):
    """Supplier product listing (one card in the UI)."""

    __tablename__ = "products"

    product_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    title_translated: Mapped[str | None] = mapped_column(Text)
    link: Mapped[str | None] = mapped_column(Text)
    supplier_id: Mapped[int | None] = mapped_column(Integer, index=True)
    image_urls: Mapped[list[str] | None] = mapped_column(ARRAY(Text))
    image_urls_clean: Mapped[list[str] | None] = mapped_column(ARRAY(Text))
    taxonomy_id: Mapped[int | None] = mapped_column(Integer)

    def __repr__(self) -> str:
        return f"<Product(product_id={self.product_id}, title={self.title!r})>"


class ProductVariant(Base):
    """
    Purchasable configuration of a product (colour, size, ...).

    Price, MOQ, lead time and shipping dimensions live on the variant,
    so every filter except labels, translation and taxonomy applies here.
    """

    __tablename__ = "product_variants"

    product_variant_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.product_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_variant_key: Mapped[str | None] = mapped_column(Text)
    product_variant_key_translated: Mapped[str | None] = mapped_column(Text)
    images: Mapped[list[str] | None] = mapped_column(ARRAY(Text))
    price: Mapped[Decimal | None] = mapped_column(Numeric(12, 4))
    moq: Mapped[int | None] = mapped_column(Integer)
    lead_time_days: Mapped[int | None] = mapped_column(Integer)
    weight_per_unit_kg: Mapped[Decimal | None] = mapped_column(Numeric(10, 4))
    length_cm: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    width_cm: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    height_cm: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))


class ProductLabel(Base):
    """Label key attached to a product (e.g. ``eco_friendly``)."""

    __tablename__ = "product_labels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.product_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    label_key: Mapped[str] = mapped_column(String(100), nullable=False, index=True)


class ProductEmbedding(Base):
    """
    Product-level embedding used for candidate selection.

    Indexes:
        - HNSW index on embedding (cosine ops), tuned per query through
          ``hnsw.ef_search``
    """

    __tablename__ = "product_embeddings"
    __table_args__ = (
        Index(
            "ix_product_embeddings_embedding_hnsw",
            "embedding",
            postgresql_using="hnsw",
            postgresql_with={"m": 16, "ef_construction": 64},
            postgresql_ops={"embedding": "vector_cosine_ops"},
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.product_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    model: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    embedding: Mapped[list[float]] = mapped_column(Vector(EMBEDDING_DIMENSIONS), nullable=False)


class ProductVectorStore(Base):
    """Variant-level embedding; the unit that gets deduplicated per product."""

    __tablename__ = "product_vector_store"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.product_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_variant_id: Mapped[int] = mapped_column(
        ForeignKey("product_variants.product_variant_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    model: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    embedding_raw: Mapped[str | None] = mapped_column(Text, doc="Text that was embedded")
    embedding: Mapped[list[float]] = mapped_column(Vector(EMBEDDING_DIMENSIONS), nullable=False)


class ProductSearchMetrics(Base):
    """Precomputed relevance signal; missing rows rank as 0."""

    __tablename__ = "product_search_metrics"

    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.product_id", ondelete="CASCADE"),
        primary_key=True,
    )
    final_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
