import argparse

from poolladder.storage.json_files import JsonFileStorage
from poolladder.storage.repository import LadderRepository
from poolladder.storage.sql import SqlStorage


def main():
    parser = argparse.ArgumentParser(description="Copy the JSON ladder files into a SQL database")
    parser.add_argument("data_dir", help="Directory holding players.json / matches.json / meta.json")
    parser.add_argument("database_url", help="SQLAlchemy database URL")
    args = parser.parse_args()

    store = LadderRepository([JsonFileStorage(args.data_dir)]).load()
    snapshot = LadderRepository([SqlStorage(args.database_url)]).save(store)
    print(f"ok: players={len(snapshot.players)} matches={len(snapshot.matches)}")


if __name__ == "__main__":
    main()
