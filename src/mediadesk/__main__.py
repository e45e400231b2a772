from mediadesk.cli.__main__ import app

if __name__ == "__main__":
    app()
