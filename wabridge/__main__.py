from wabridge.main import run

run()
