"""SQL storage of gaivota records: the database connection and one store per record type."""