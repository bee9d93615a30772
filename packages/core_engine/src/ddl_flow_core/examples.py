EXAMPLE_SQL = """-- paste your SQL here
CREATE SCHEMA IF NOT EXISTS writer_schema;

CREATE TABLE IF NOT EXISTS writer_schema.sites (
    id bigint PRIMARY KEY,
    code text NOT NULL,
    name text,
    live_release_id bigint
);

CREATE TABLE IF NOT EXISTS writer_schema.site_releases (
    id bigint PRIMARY KEY,
    site_id bigint NOT NULL
);

ALTER TABLE writer_schema.sites
ADD CONSTRAINT fk_sites_live_release FOREIGN KEY (live_release_id) REFERENCES writer_schema.site_releases (id);

CREATE TABLE IF NOT EXISTS writer_schema.views (
    id bigint PRIMARY KEY,
    site_id bigint NOT NULL,
    path text NOT NULL
);

ALTER TABLE writer_schema.views
ADD CONSTRAINT views_site_id_fkey FOREIGN KEY (site_id) REFERENCES writer_schema.sites (id) ON DELETE CASCADE;
"""
