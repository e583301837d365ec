from .cli import main

main(prog_name="git-local-backup")
