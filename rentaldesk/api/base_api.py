from rentaldesk.client import Client


class BaseApi:

    def __init__(self, client: Client) -> None:
        self._client = client
