import csv
import io

import factory

from db.models import Page


class PageFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Factory for creating Page instances (session is bound in conftest)."""

    class Meta:
        model = Page
        sqlalchemy_session_persistence = "commit"

    name = factory.Sequence(lambda n: f"page-{n}")
    title = factory.Sequence(lambda n: f"Page {n}")
    template = "article"
    status = Page.STATUS_ON


def csv_bytes(rows, delimiter=",", quotechar='"'):
    """Render rows (lists of cells, or None for a blank line) as UTF-8 CSV bytes."""
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=delimiter, quotechar=quotechar, lineterminator="\n")
    for row in rows:
        if row is None:
            buf.write("\n")
        else:
            writer.writerow(row)
    return buf.getvalue().encode("utf-8")
