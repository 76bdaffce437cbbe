"""ybackup — database backup orchestration through YugabyteDB Anywhere."""
