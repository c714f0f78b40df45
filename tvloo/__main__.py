from tvloo.main import run

run()
