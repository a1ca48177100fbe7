"""Run the iREVA authorization service: python3 -m ireva"""

import uvicorn

from ireva.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("ireva.api.app:create_app", factory=True, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
