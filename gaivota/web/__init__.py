"""HTTP routing and request handlers for the gaivota API."""