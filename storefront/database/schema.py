schema = [
    {"table_name":"account_table",
    "table_columns":{
        "id":"INTEGER PRIMARY KEY AUTOINCREMENT",
        "username":"TEXT UNIQUE NOT NULL",
        "email":"TEXT UNIQUE NOT NULL",
        "password_hash":"TEXT NOT NULL",
        "first_name":"TEXT NOT NULL",
        "last_name":"TEXT NOT NULL",
        "role":"TEXT NOT NULL DEFAULT 'User' CHECK (role IN ('User', 'Admin'))",
        "active":"BOOL DEFAULT 1",
        "created_at":"TIMESTAMP",
        "last_login_at":"TIMESTAMP"
        }},
    {"table_name":"customer_table",
    "table_columns":{
        "id":"INTEGER PRIMARY KEY AUTOINCREMENT",
        "account_id":"INTEGER UNIQUE NOT NULL",
        "phone":"TEXT",
        "address":"TEXT",
        "city":"TEXT",
        "postal_code":"TEXT",
        "country":"TEXT",
        "created_at":"TIMESTAMP",
        "FOREIGN KEY":[{
                "key":"account_id",
                "parent_table":"account_table",
                "parent_key":"id",
                "instruction":"ON DELETE CASCADE"
            }]
        }},
    {"table_name":"category_table",
    "table_columns":{
        "id":"INTEGER PRIMARY KEY AUTOINCREMENT",
        "name":"TEXT UNIQUE NOT NULL",
        "description":"TEXT",
        "active":"BOOL DEFAULT 1",
        "created_at":"TIMESTAMP"
        }},
    {"table_name":"product_table",
    "table_columns":{
        "id":"INTEGER PRIMARY KEY AUTOINCREMENT",
        "name":"TEXT NOT NULL",
        "description":"TEXT",
        "price":"DECIMAL NOT NULL CHECK (price > 0)",
        "stock_quantity":"INTEGER NOT NULL DEFAULT 0 CHECK (stock_quantity >= 0)",
        "sku":"TEXT UNIQUE",   #NULL allowed more than once
        "image_url":"TEXT",
        "active":"BOOL DEFAULT 1",
        "created_at":"TIMESTAMP",
        "updated_at":"TIMESTAMP",
        "category_id":"INTEGER NOT NULL",
        "FOREIGN KEY":[{
                "key":"category_id",
                "parent_table":"category_table",
                "parent_key":"id"
            }]
        }},
    {"table_name":"review_table",
    "table_columns":{
        "id":"INTEGER PRIMARY KEY AUTOINCREMENT",
        "rating":"INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5)",
        "comment":"TEXT",
        "customer_name":"TEXT NOT NULL",    #Snapshot at review time
        "customer_email":"TEXT NOT NULL",
        "created_at":"TIMESTAMP",
        "approved":"BOOL DEFAULT 0",
        "product_id":"INTEGER NOT NULL",
        "UNIQUE":["product_id", "customer_email"],
        "FOREIGN KEY":[{
                "key":"product_id",
                "parent_table":"product_table",
                "parent_key":"id",
                "instruction":"ON DELETE CASCADE"
            }]
        }},
    {"table_name":"order_table",
    "table_columns":{
        "id":"INTEGER PRIMARY KEY AUTOINCREMENT",
        "order_number":"TEXT UNIQUE NOT NULL",
        "order_date":"TIMESTAMP",
        "total_amount":"DECIMAL NOT NULL DEFAULT 0",
        "status":"TEXT NOT NULL DEFAULT 'Pending' CHECK (status IN ('Pending', 'Processing', 'Shipped', 'Delivered', 'Cancelled'))",
        "notes":"TEXT",
        "shipping_address":"TEXT",
        "customer_id":"INTEGER NOT NULL",
        "FOREIGN KEY":[{
                "key":"customer_id",
                "parent_table":"customer_table",
                "parent_key":"id",
                "instruction":"ON DELETE CASCADE"
            }]
        }},
    {"table_name":"order_item_table",
    "table_columns":{
        "id":"INTEGER PRIMARY KEY AUTOINCREMENT",
        "quantity":"INTEGER NOT NULL CHECK (quantity BETWEEN 1 AND 1000)",
        "unit_price":"DECIMAL NOT NULL",   #Price at order time
        "order_id":"INTEGER NOT NULL",
        "product_id":"INTEGER NOT NULL",
        "FOREIGN KEY":[{
                "key":"order_id",
                "parent_table":"order_table",
                "parent_key":"id",
                "instruction":"ON DELETE CASCADE"
            },
            {
                "key":"product_id",
                "parent_table":"product_table",
                "parent_key":"id"
            }]
        }},
]
