import sys

from loguru import logger

from rentaldesk.api.entity_api import EntityApi
from rentaldesk.client import Client
from rentaldesk.documents.preview import server_origin
from rentaldesk.documents.registry import LocalReferences
from rentaldesk.exceptions import RentalDeskError
from rentaldesk.notifications import LogNotifier, Notifier
from rentaldesk.schemas import SCHEMAS
from rentaldesk.services.entity_panel import EntityPanel
from rentaldesk.utils.settings import get_settings


class RentalDesk:
    """
    Main orchestrator of the rental admin console.

    Owns the HTTP client and one API and panel per entity. Vehicle labels are
    shared with every panel that references vehicles.
    """

    def __init__(self, base_url: str | None = None, notifier: Notifier | None = None) -> None:
        self._init_logger()
        self._client = Client(base_url=base_url)
        self.server_origin = server_origin(self._client.base_url)
        self.notifier = notifier or LogNotifier()
        self.references = LocalReferences()
        self.reference_labels: dict[str, dict[str, str]] = {}

        self.apis = {key: EntityApi(self._client, schema) for key, schema in SCHEMAS.items()}
        self.panels = {
            key: EntityPanel(api, self.server_origin, notifier=self.notifier, references=self.references)
            for key, api in self.apis.items()
        }
        for panel in self.panels.values():
            panel.reference_labels = self.reference_labels

    async def close(self) -> None:
        """Discard open forms and close the underlying HTTP client."""
        for panel in self.panels.values():
            panel.close()
        self.references.revoke_all()
        await self._client.close()

    async def __aenter__(self) -> "RentalDesk":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def panel(self, key: str) -> EntityPanel:
        """
        :raises KeyError: If ``key`` is not a known entity
        """
        try:
            return self.panels[key]
        except KeyError:
            raise KeyError(f'Unknown entity {key!r}; expected one of {", ".join(self.panels)}') from None

    async def load_reference_labels(self) -> dict[str, str]:
        """
        Load vehicle labels used to display and pick vehicles in dependent forms.

        :return: Vehicle id to label; empty when vehicles cannot be loaded
        """
        try:
            vehicles = await self.apis['vehicles'].list()
        except RentalDeskError as e:
            logger.warning(f'Failed to load vehicles for references: {e}')
            self.notifier.error('Failed to load vehicles.')
            return {}
        labels = {vehicle.id: vehicle.label for vehicle in vehicles}
        self.reference_labels['vehicles'] = labels
        return labels

    def reference_options(self, key: str) -> list[tuple[str, str]]:
        """(label, id) pairs of an entity, as loaded by :meth:`load_reference_labels`."""
        labels = self.reference_labels.get(key, {})
        return sorted(((label, record_id) for record_id, label in labels.items()), key=lambda item: item[0])

    def _init_logger(self) -> None:
        """Configure logging based on RENTALDESK_DEBUG environment variable.

        If RENTALDESK_DEBUG is set to a truthy value, enables DEBUG level logging.
        Otherwise, only WARNING and above are shown.
        """
        logger.remove()
        settings = get_settings()
        level = "DEBUG" if settings.debug else "WARNING"
        log_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ) if settings.debug else "<level>{message}</level>"
        logger.add(sys.stderr, level=level, format=log_format)
