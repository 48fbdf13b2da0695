"""
Example 01: Joined Containments

This example demonstrates fetching articles together with their author
using a single joined statement.
"""

from row_orm import Engine, ConnectionConfig, Table
import tempfile
import sqlite3
from pathlib import Path


def main():
    # Create a temporary database
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    # Set up the database with some test data
    conn = sqlite3.connect(db_path)
    conn.execute("CREATE TABLE authors (id INTEGER PRIMARY KEY, name VARCHAR(255))")
    conn.execute("""
        CREATE TABLE articles (
            id INTEGER PRIMARY KEY,
            title VARCHAR(255),
            body TEXT,
            author_id INTEGER
        )
    """)
    conn.execute("INSERT INTO authors (name) VALUES ('Chuck Norris')")
    conn.execute("INSERT INTO authors (name) VALUES ('Bruce Lee')")
    conn.execute("INSERT INTO articles (title, body, author_id) VALUES ('a title', 'a body', 1)")
    conn.execute("INSERT INTO articles (title, body, author_id) VALUES ('another title', 'another body', 2)")
    conn.commit()
    conn.close()

    # Configure engine and tables; schemas are reflected from the database
    engine = Engine.from_config(ConnectionConfig(driver="sqlite", database=db_path))
    articles = Table.build("article", engine=engine)
    articles.belongs_to("author")

    print("=== Joined Containments ===\n")

    query = articles.query().contain("author")
    print(f"SQL: {query.sql()}\n")

    for article in query:
        print(f"  - {article['title']} by {article['author']['name']}")
    print()

    # Field overrides select only the listed columns of the association
    query = articles.query().select(["title"]).contain({"author": {"fields": ["name"]}})
    print(f"With fields: {query.to_array()}\n")

    # Clean up
    engine.close()
    Path(db_path).unlink()


if __name__ == "__main__":
    main()
