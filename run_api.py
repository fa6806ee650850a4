import os

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "metricql.api.main:app",
        host=os.getenv("METRICQL_HOST", "0.0.0.0"),
        port=int(os.getenv("METRICQL_PORT", "8000")),
        reload=False,
    )
