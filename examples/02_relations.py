"""
Example 02: Relations

This example declares HasMany and HasOne relations, loads them lazily
and saves child rows together with their parent.
"""

from data_mapper import ConnectionConfig, Entity, Mapper, MapperRegistry, create_adapter

registry = MapperRegistry()


@registry.register
class AuthorMapper(Mapper):
    source = "authors"
    fields = {
        "id": {"type": "int", "primary": True},
        "name": {"type": "string", "required": True},
    }


@registry.register
class CommentMapper(Mapper):
    source = "comments"
    fields = {
        "id": {"type": "int", "primary": True},
        "post_id": {"type": "int", "index": True},
        "name": {"type": "string", "required": True},
        "body": {"type": "text"},
    }


@registry.register
class PostMapper(Mapper):
    source = "posts"
    fields = {
        "id": {"type": "int", "primary": True},
        "title": {"type": "string", "required": True},
        "author_id": {"type": "int"},
        "comments": {
            "type": "relation",
            "relation": "HasMany",
            "mapper": "CommentMapper",
            "where": {"self.id": "foreign.post_id"},
        },
        "author": {
            "type": "relation",
            "relation": "HasOne",
            "mapper": "AuthorMapper",
            "where": {"self.author_id": "foreign.id"},
        },
    }


def main():
    adapter = create_adapter(ConnectionConfig(driver="sqlite"))
    authors = AuthorMapper(adapter, registry=registry)
    posts = PostMapper(adapter, registry=registry)
    for mapper in (authors, CommentMapper(adapter, registry=registry), posts):
        mapper.migrate()

    print("=== Relations ===\n")

    author_id = authors.save(Entity(name="Ada"))

    # Children in a relation field are saved with the parent's key
    post = Entity(title="Hello relations", author_id=author_id)
    post.comments = [
        Entity(name="Grace", body="Nice post"),
        {"name": "Linus", "body": "Ship it"},
    ]
    post_id = posts.save(post)
    print(f"Saved post {post_id} with its comments")

    loaded = posts.get(post_id)
    print(f"Relation handle before use: {loaded.comments!r}")
    for comment in loaded.comments:
        print(f"  - {comment.name}: {comment.body}")
    print(f"Relation handle after use: {loaded.comments!r}")
    print(f"Author: {loaded.author.name}\n")

    # A failing child is reported on the parent mapper
    post = posts.get(post_id)
    post.comments = [Entity(body="anonymous")]
    posts.save(post)
    print(f"Cascade errors: {posts.get_errors()}")

    adapter.close()


if __name__ == "__main__":
    main()
