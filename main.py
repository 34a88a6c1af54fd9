import uvicorn

from registry_proxy import config, create_app

app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        app,
        host=config.HOST,
        port=config.PORT,
        log_level="debug" if config.is_debug() else "info",
        proxy_headers=True,
    )
