from installer.cli import run

run()
