"""
Example 02: Eager Loading

This example demonstrates loading one-to-many associations with a follow-up
query per association, including sorting and nested containments.
"""

import logging

from row_orm import Engine, ConnectionConfig, Table, MissingForeignKeyError
import tempfile
import sqlite3
from pathlib import Path


class Authors(Table):
    """Authors table with its associations declared up front"""

    def initialize(self):
        self.has_many("article", property="articles")


class Articles(Table):
    """Articles table"""

    def initialize(self):
        self.belongs_to("author")
        self.has_many("comment", property="comments")


def main():
    # Log every statement the engine runs
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    conn = sqlite3.connect(db_path)
    conn.execute("CREATE TABLE authors (id INTEGER PRIMARY KEY, name VARCHAR(255))")
    conn.execute("CREATE TABLE articles (id INTEGER PRIMARY KEY, title VARCHAR(255), author_id INTEGER)")
    conn.execute("CREATE TABLE comments (id INTEGER PRIMARY KEY, article_id INTEGER, comment TEXT)")
    conn.execute("INSERT INTO authors (name) VALUES ('Chuck Norris')")
    conn.execute("INSERT INTO authors (name) VALUES ('Bruce Lee')")
    conn.execute("INSERT INTO articles (title, author_id) VALUES ('a title', 1)")
    conn.execute("INSERT INTO articles (title, author_id) VALUES ('another title', 2)")
    conn.execute("INSERT INTO articles (title, author_id) VALUES ('a fine title', 2)")
    conn.execute("INSERT INTO comments (article_id, comment) VALUES (1, 'first')")
    conn.execute("INSERT INTO comments (article_id, comment) VALUES (3, 'nice one')")
    conn.commit()
    conn.close()

    engine = Engine.from_config(ConnectionConfig(driver="sqlite", database=db_path))
    Table.config("comment", engine=engine)
    authors = Authors.build("author", engine=engine)
    Articles.build("article", engine=engine)

    print("=== Eager Loading ===\n")

    # One statement for authors, one for all of their articles
    results = authors.query().contain({"article": {"sort": {"id": "DESC"}}}).to_array()
    for author in results:
        titles = [article["title"] for article in author.get("articles", [])]
        print(f"  - {author['name']}: {titles}")
    print()

    # Nested containments run one more statement per level
    results = authors.query().contain("article.comment").to_array()
    for author in results:
        for article in author.get("articles", []):
            comments = [comment["comment"] for comment in article.get("comments", [])]
            print(f"  - {author['name']} / {article['title']}: {comments}")
    print()

    # The link column must be selected when fields are restricted
    try:
        authors.query().contain({"article": {"fields": ["title"]}}).to_array()
    except MissingForeignKeyError as e:
        print(f"MissingForeignKeyError: {e}\n")

    # Clean up
    engine.close()
    Path(db_path).unlink()


if __name__ == "__main__":
    main()
