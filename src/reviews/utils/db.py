from collections.abc import Iterator

from protean.domain import Domain
from sqlalchemy import create_engine

SCAN_BATCH_SIZE = 500


def iter_all(queryset, order_by: str, batch_size: int = SCAN_BATCH_SIZE) -> Iterator:
    """Yield every record matched by `queryset`, one batch at a time.

    Protean querysets are limited by default, so full scans walk the result
    with offset/limit over a stable single-key ordering.
    """
    queryset = queryset.order_by(order_by)
    offset = 0
    while True:
        batch = queryset.offset(offset).limit(batch_size).all().items
        yield from batch
        if len(batch) < batch_size:
            return
        offset += batch_size


def setup_db(domain: Domain):
    """Create relational tables for every aggregate, entity and projection."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in ("sqlite", "postgresql"):
                engine = create_engine(provider.conn_info["database_uri"])

                # Touching _dao registers each element's model with SQLAlchemy
                for _, aggregate_record in domain.registry.aggregates.items():
                    if aggregate_record.cls.meta_.provider == provider.name:
                        domain.repository_for(aggregate_record.cls)._dao  # noqa: B018

                for _, entity_record in domain.registry.entities.items():
                    if entity_record.cls.meta_.provider == provider.name:
                        domain.repository_for(entity_record.cls)._dao  # noqa: B018

                for _, projection_record in domain.registry.projections.items():
                    if projection_record.cls.meta_.provider == provider.name:
                        domain.repository_for(projection_record.cls)._dao  # noqa: B018

                provider._metadata.create_all(engine)


def drop_db(domain: Domain):
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in ("sqlite", "postgresql"):
                engine = create_engine(provider.conn_info["database_uri"])
                provider._metadata.drop_all(engine)
