from velion_dkn.api.fastapi import create_app
from velion_dkn.app.core.logging import setup_logging

setup_logging()

app = create_app()
