from visual_click.cli import run

run()
