from .cli import app

app(prog_name="lab-init")
