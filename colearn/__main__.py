import uvicorn

from colearn import config

if __name__ == "__main__":
    uvicorn.run("colearn.main:app", host=config.HOST, port=config.PORT)
