from hiretrack import create_app

app = create_app()
