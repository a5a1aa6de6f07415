"""Business services for blog posts, categories, templates, contacts and newsletters."""