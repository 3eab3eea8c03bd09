from __future__ import annotations

import os

from src.adapters.files import DirectoryFileSaver
from src.adapters.transit.http_transit_data_provider import HttpTransitDataProvider
from src.app.ports.output import IFileSaver, ITransitDataProvider
from src.app.services.selection_session import SelectionSession
from src.domain.algorithms.gpx import DEFAULT_AUTHOR


def get_transit_data_provider() -> ITransitDataProvider:
    return HttpTransitDataProvider()


def get_selection_session() -> SelectionSession:
    # A fresh session per request: nothing is kept across requests.
    return SelectionSession(
        provider=get_transit_data_provider(),
        author=os.getenv("GPX_AUTHOR_NAME") or DEFAULT_AUTHOR,
    )


def get_file_saver() -> IFileSaver:
    return DirectoryFileSaver()
