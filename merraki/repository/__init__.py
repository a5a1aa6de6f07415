"""SQL repositories for blog posts, categories, templates and newsletter subscribers."""