"""
Example 01: Blog Mapper

This example walks one entity through its lifecycle on SQLite:
migrate, insert, find, update and destroy.
"""

import tempfile
from pathlib import Path

from data_mapper import ConnectionConfig, Mapper, create_adapter


class BlogMapper(Mapper):
    source = "blog_posts"
    fields = {
        "id": {"type": "int", "primary": True},
        "title": {"type": "string", "required": True},
        "body": {"type": "text", "required": True},
        "date_created": {"type": "datetime"},
    }


def main():
    db_path = Path(tempfile.mkdtemp()) / "blog.db"
    adapter = create_adapter(ConnectionConfig(driver="sqlite", database=str(db_path)))
    blog = BlogMapper(adapter)

    print("=== Blog Mapper ===\n")

    blog.migrate()
    print(f"Migrated source '{blog.get_source()}' with fields {list(blog.get_fields())}\n")

    # Validation failure: nothing is written
    draft = blog.get()
    draft.title = "Draft without a body"
    print(f"save() without body: {blog.save(draft)}")
    print(f"Errors: {blog.get_errors()}\n")

    # Insert
    post = blog.get()
    post.title = "Test Post"
    post.body = "<p>This is a really awesome super-duper post.</p>"
    post.date_created = adapter.datetime()
    post_id = blog.save(post)
    print(f"Inserted post with id {post_id}")

    # Find
    found = blog.first({"title": "Test Post"})
    print(f"Found: {found}")

    # Update sends only modified fields
    found.title = "Test Post Modified"
    print(f"Modified fields: {found.modified_fields()}")
    print(f"update: {blog.save(found)}")

    # Destroy
    print(f"destroy: {blog.destroy(found)}")
    print(f"After destroy: {blog.first({'title': 'Test Post Modified'})}\n")

    print(f"Statements executed: {blog.query_count()}")
    for entry in blog.debug():
        print(f"  {entry.query}")

    adapter.close()
    db_path.unlink()
    db_path.parent.rmdir()


if __name__ == "__main__":
    main()
