# local listener: python -m chatbot
import logging

import uvicorn

from chatbot.core import config


def main() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("chatbot.main:app", host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    main()
