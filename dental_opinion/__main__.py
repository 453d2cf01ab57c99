import uvicorn

from dental_opinion.config import get_settings


def main():
    settings = get_settings()
    uvicorn.run("dental_opinion.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
